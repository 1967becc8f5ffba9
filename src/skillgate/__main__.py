from skillgate.interfaces.cli import app

app()
