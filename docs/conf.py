"""Sphinx build settings for the heat-aposteriori API reference."""
import os
import sys

# build against the working tree without installing it
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

project = "heat-aposteriori"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx.ext.mathjax",
    "sphinx_copybutton",
]

master_doc = "index"
exclude_patterns = ["_build"]

# CuPy is optional; its absence must not break autodoc
autodoc_mock_imports = ["cupy"]
autosummary_generate = True
autodoc_member_order = "bysource"
autodoc_typehints = "description"
napoleon_google_docstring = True
napoleon_numpy_docstring = False

html_theme = "furo"
html_title = "heat-aposteriori"
copybutton_prompt_text = r">>> |\$ "
copybutton_prompt_is_regexp = True
