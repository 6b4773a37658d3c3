from tagger.cli import cli

cli()
