from pollbox.cli.app import cli

cli()
