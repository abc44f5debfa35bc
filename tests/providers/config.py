def make_config():
    return {"greeting": "Hello"}


__provider__ = make_config
