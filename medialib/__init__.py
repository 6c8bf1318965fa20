"""Media-organization core of the CMS: folder forest and gallery ordering."""

__version__ = "0.1.0"
