import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

# protean[postgresql] pulls psycopg2, whose compiled module is tied to the
# interpreter it was built for.
REBUILD_PER_PYTHON = ["psycopg2"]

nox.options.sessions = ["tests"]


def _install_billing(session: nox.Session) -> None:
    session.install("-e", ".[test]")
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *REBUILD_PER_PYTHON)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Whole billing suite, one run per supported Python."""
    _install_billing(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_domain(session: nox.Session) -> None:
    """Aggregate and value-object rules, no providers touched."""
    _install_billing(session)
    session.run("pytest", "-m", "domain", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_flows(session: nox.Session) -> None:
    """Command handlers, event projections and the stock outbox."""
    _install_billing(session)
    session.run("pytest", "-m", "application", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_api(session: nox.Session) -> None:
    """FastAPI routes and the behaviour scenarios."""
    _install_billing(session)
    session.run("pytest", "-m", "integration or bdd", *session.posargs)
