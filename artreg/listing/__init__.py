"""Registry listings — read-only projection plus Rich rendering.

Modules
-------
projection
    ``build_rows`` and ``quiet_ids`` derive ``ListRow`` values from the
    registry index; ``elapsed_label`` renders creation times as ages.
renderer
    ``ListingRenderer`` prints rows as a table or as bare short ids.
"""
