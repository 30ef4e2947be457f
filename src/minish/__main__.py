from minish.cli import app

app()
