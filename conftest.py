"""
Configuration for pytest to show test docstrings as test names.

Parametrized tests keep their parameter id after the docstring summary.
"""


def pytest_collection_modifyitems(items):
    """Use the first docstring line of each test as its reported name."""
    for item in items:
        docstring = item.function.__doc__
        if not docstring:
            continue
        summary = next(
            (line.strip() for line in docstring.strip().splitlines() if line.strip()),
            None,
        )
        if summary:
            start = item.nodeid.find("[")
            parameter_part = item.nodeid[start:] if start != -1 else ""
            item._nodeid = summary + parameter_part
