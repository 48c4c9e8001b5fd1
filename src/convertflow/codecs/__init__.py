#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/codecs/__init__.py
"""Integration shims over third-party codecs.

- :mod:`convertflow.codecs.pdf` - PyMuPDF document container
- :mod:`convertflow.codecs.layout` - paginated text layout, reportlab output
- :mod:`convertflow.codecs.raster` - Pillow raster surface
- :mod:`convertflow.codecs.package` - python-docx, openpyxl, python-pptx, odfpy
- :mod:`convertflow.codecs.richtext` - HTML and RTF containers

Codec packages are imported lazily inside each function so that a missing
optional package only affects the conversions that need it.
"""
