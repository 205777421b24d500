# Configuration file for the Sphinx documentation builder.
import os
import sys
from datetime import date

# Add src to path so autodoc can find the package
sys.path.insert(0, os.path.abspath("../src"))

import stagecoach

# -- Project information -----------------------------------------------------
project = "Stagecoach"
copyright = f"{date.today().year}, Stagecoach Contributors"
author = "Stagecoach Team"
release = stagecoach.__version__
version = ".".join(release.split(".")[:2])

# -- General configuration ---------------------------------------------------
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.viewcode",
    "sphinx.ext.napoleon",  # Google/NumPy style docstrings
    "sphinx_rtd_theme",
]

exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

# -- Options for HTML output -------------------------------------------------
html_theme = "sphinx_rtd_theme"
html_theme_options = {
    "navigation_depth": 3,
}

# -- Extension configuration -------------------------------------------------
autodoc_member_order = "bysource"
autodoc_typehints = "description"
