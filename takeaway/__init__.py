"""Takeaway order management backend: orders, guests, payments and sales analytics."""
