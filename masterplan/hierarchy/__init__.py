from masterplan.hierarchy.resolver import LayerTree, Resolution, build_href, count_available

__all__ = ["LayerTree", "Resolution", "build_href", "count_available"]
