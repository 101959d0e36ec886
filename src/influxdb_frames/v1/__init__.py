"""InfluxQL: query builder, JSON response parser and clients."""
