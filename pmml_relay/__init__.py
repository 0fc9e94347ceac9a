"""pmml-relay -- forward flow records to a PMML scoring service."""

__version__ = "0.1.0"
