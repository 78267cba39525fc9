"""
Exchange-independent building blocks shared by every adapter.

Modules:
    params: Parameter bag normalization (market type, withdraw tag)
    order_type: Post-only / time-in-force resolution and order argument checks
    composite: Operations composed from adapter primitives
    context: Per-call request context and signed request models
    nonce: Strictly increasing nonce source
    precision: Amount and price formatting against market increments
    safe: Defensive field extraction, timestamps and list filters
"""
