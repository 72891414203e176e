"""
Market pulse store.
Validated storage and retrieval of market-scoped metric records.

Modules:
- shared: Errors and enumerations used across layers
- config: Typed configuration state
- infrastructure: Database adapters, logging
- validation: Schema-driven validation of inbound records
- storage: Schemas, repositories, and table bootstrap
- service: PulseStore, the entry point for callers
- aggregation: Per-interval summaries for history reports
"""
