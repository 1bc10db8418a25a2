"""Business services for staff, reviews, customers and accounts."""
