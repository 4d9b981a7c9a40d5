"""HTTP surface for the map and shape-drop pipelines."""
