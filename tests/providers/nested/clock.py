class Clock:
    def __init__(self, config):
        self.config = config

    def now(self):
        return 0


__provider__ = Clock
