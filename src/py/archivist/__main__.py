import argparse
import sys

from .bridge.asgi import server
from .config import CONFIG_PATH, Config, ConfigurationError
from .utils.logging import error, info


def main(args: list[str]) -> int:
	parser = argparse.ArgumentParser(
		prog="archivist",
		description="Serves a directory as a browsable archive",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument(
		"-c",
		"--config",
		action="store",
		dest="config",
		help="TOML (or JSON) configuration file",
		default=CONFIG_PATH,
	)
	parser.add_argument(
		"-r",
		"--root",
		action="store",
		dest="root",
		help="Directory to serve, overriding the configuration",
	)
	parser.add_argument(
		"-l",
		"--listen",
		action="store",
		dest="listen",
		help="Address and port to listen to, like localhost:5000",
	)
	parser.add_argument(
		"-a",
		"--allow-all",
		action="store_true",
		dest="allowAll",
		help="Serve all the files that are not hidden or blocked",
	)
	parser.add_argument(
		"--raw",
		action="store_true",
		dest="raw",
		help="Serve files as-is, without listing directories",
	)
	options = parser.parse_args(args=args)

	try:
		config = Config.Load(options.config) if options.config else Config.Default()
		if options.root:
			config = config._replace(root_dir=options.root)
		if options.listen:
			config = config._replace(listen=options.listen)
		if options.allowAll:
			config = config._replace(allow_all=True)
		host, port = config.host, config.port
	except ConfigurationError as e:
		error("Invalid configuration", "CONFIG", reason=str(e))
		return 1

	# The server is only needed when running from the command line
	import uvicorn

	info("Serving archive", root=config.root_dir, listen=config.listen, raw=options.raw)
	uvicorn.run(server(config, raw=options.raw), host=host, port=port)
	return 0


def run() -> None:
	sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
	run()

# EOF
