"""Flux: query builder, annotated CSV response parser and client."""
