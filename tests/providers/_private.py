__provider__ = lambda: "private"
