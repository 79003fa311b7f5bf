"""Route Eats backend: restaurants along a driving route."""
