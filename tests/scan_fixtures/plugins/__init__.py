class Plugin:
    name = "base"
