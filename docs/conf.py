from importlib.metadata import metadata

from blpio import __version__


_meta = metadata("blpio")

project = _meta["Name"]
author = _meta["Author"]
copyright = f"2026, {author}"
version = ".".join(__version__.split(".")[0:2])
release = __version__


extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.intersphinx",
    "notfound.extension",
    "sphinx_last_updated_by_git"
]

autodoc_member_order = "bysource"
autodoc_typehints = "description"

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable", None),
    "PIL": ("https://pillow.readthedocs.io/en/stable", None)
}

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']


html_theme = 'furo'
html_title = f"{project} {release}"
html_copy_source = False

nitpicky = True
nitpick_ignore = {
    ("py:class", "optional"),
    ("py:class", "npt.NDArray"),
    ("py:class", "Image.SupportsArrayInterface")
}
