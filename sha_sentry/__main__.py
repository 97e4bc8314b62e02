from sha_sentry.cli import cli

cli()
