"""Serialization of session control signals."""

from nebulamorph.io.exporter import SignalExporter

__all__ = ["SignalExporter"]
