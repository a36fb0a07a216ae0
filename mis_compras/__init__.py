"""Mis Compras.

Procurement and budget management service for the museum's purchasing office.

High-level architecture
-----------------------

- **Requirements** are purchase requests raised by staff. They move through an
  approval workflow (``PENDING_APPROVAL`` -> ``APPROVED`` -> ``IN_PROCESS`` ->
  ``COMPLETED``) and, once approved, draw money from a budget.
- **Budgets** are yearly allocations per project and area. Directors create
  them, the assigned manager approves them, and budget adjustments (increases
  or transfers between budgets) change their amounts after approval.
- **Invoices** are matched against approved requirements before payment
  (the 3-way match), and **payments** are registered against requirements.

Core subpackages
----------------

- ``mis_compras.core``: pure business rules (``workflow``, ``formatters``,
  ``validation``), logging, domain errors and the database layer (entities and
  repositories).
- ``mis_compras.server``: the FastAPI application, its routers, services,
  security dependencies and exception handlers.
"""
