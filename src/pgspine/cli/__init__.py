"""pg-spine command-line interface (``pgspine``)."""
