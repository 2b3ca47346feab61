"""
Flow - the connect / query / transfer state machine.

- units:      base-unit conversion and amount validation
- state:      state record, events, pure transitions, view-model
- controller: ``TokenFlow``, which drives the chain client
"""
