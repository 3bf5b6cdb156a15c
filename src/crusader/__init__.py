"""
crusader

Reverse-dependency regression testing for a library on the crate registry.

Every downstream crate is built twice, once against the published release of
the library and once against the local work-in-progress tree, and the pair of
outcomes is classified as pass / regressed / broken / error.
"""

__version__ = "0.1.0"
