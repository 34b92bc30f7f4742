class CallbackDriver:
    """Forwards every delivered entry to a plain callable."""

    def __init__(self, id, callback, rules=()):
        self.id = id
        self.callback = callback
        self.rules = list(rules)

    def receive(self, level, category, date, message):
        self.callback(level, category, date, message)
