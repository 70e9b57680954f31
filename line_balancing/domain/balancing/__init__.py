"""
Line Balancing Domain

Splits a product's operations among operators. The ``BalancingSession``
aggregate owns the pool of pending capacity and the operator slots; the
calculator derives metrics from its snapshots and the controller turns user
intents into session commands.
"""
