from deckhand.cli.app import app

app()
