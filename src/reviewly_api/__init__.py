"""HTTP layer of the Reviewly API."""
