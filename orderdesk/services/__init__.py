"""Services Layer — imperative shell around the pure order rules in core/.

Invariants:
    - Every service takes an AsyncSession and owns its transactions via unit_of_work
    - Services raise OrderDeskError subclasses; routes never catch them

Design Decisions:
    - One class per concern (numbering, addresses, resolution, validation,
      lifecycle, assembly, queries) for locality
"""
