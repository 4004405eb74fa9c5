class SequenceRng:
    """Stand-in for ``random.Random`` that deals kinds in a fixed cycle."""

    def __init__(self, kinds):
        self._kinds = list(kinds)
        self._index = 0

    def choice(self, _seq):
        kind = self._kinds[self._index % len(self._kinds)]
        self._index += 1
        return kind

    def shuffle(self, _seq):
        pass
