"""
Orders, payments, invoices and purchase orders.

Key pieces:
- Sequential per-year document numbers (ORD-2024-0001, INV-2024-0001, PO-2024-001)
  allocated under a row lock on a counter table
- Order ledger: balance_due recomputed from the full payment history inside
  every payment mutation's transaction
"""
