"""
Services Package

- Publisher: async fan-out of classified messages to any number of consumers
- AccountService: connection manager tying transport, classifier and publisher together
"""
