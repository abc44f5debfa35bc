from lazywire.decorators import inject


@inject(name="greet")
def make_greeter(config):
    def greet(name):
        return f"{config['greeting']} {name}"

    return greet


__provider__ = make_greeter
