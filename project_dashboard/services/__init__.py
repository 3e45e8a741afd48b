"""Pipeline services: parsing, normalization, filtering, aggregation, refresh."""
