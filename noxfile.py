import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

# psycopg2 ships a C extension; a wheel cached for another interpreter breaks imports.
_REBUILD_PER_INTERPRETER = ["psycopg2-binary"]


def _install(session: nox.Session) -> None:
    """Install memorials and its test group into the session virtualenv."""
    session.run("poetry", "install", "--with", "test", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_REBUILD_PER_INTERPRETER)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Whole suite, every supported interpreter."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_domain(session: nox.Session) -> None:
    """Aggregates, value objects and the money/slug helpers; no providers needed."""
    _install(session)
    session.run("pytest", "tests/domain/", "tests/gateway/")


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_checkout(session: nox.Session) -> None:
    """Command handlers, the HTTP API and the Gherkin checkout scenarios."""
    _install(session)
    session.run("pytest", "tests/application/", "tests/integration/", "tests/bdd/")
