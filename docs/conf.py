import os
import sys
sys.path.insert(0, os.path.abspath('..'))

project = 'bspline_filter'
copyright = '2026, bspline_filter developers'
author = 'bspline_filter developers'

extensions = [
    'myst_parser',
    'sphinx.ext.autodoc',
    'sphinx.ext.viewcode',
    'sphinx.ext.napoleon',
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'alabaster'
html_static_path = ['_static']
