"""
Signature module.

Maps placements picked on a rendered page into PDF points, decodes the
stamp image payload, renders page previews and composes signed PDFs
(overlay merge).
"""
