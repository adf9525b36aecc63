from sqlalchemy import or_


def fuzzy_pattern(term: str) -> str:
    """``"pct"`` -> ``"%p%c%t%"``: every character in order, anything between."""
    return "%" + "%".join(term.lower()) + "%"


def fuzzy_filter(query, term, *columns):
    if not term:
        return query
    pattern = fuzzy_pattern(term)
    return query.filter(or_(*[column.ilike(pattern) for column in columns]))
