from bikeflow.config import configure_logging, load_config
from bikeflow.server import serve_traffic


def main():
  config = load_config()
  configure_logging(config.log_level)

  # HOST=0.0.0.0 when deployed
  serve_traffic(config)


if __name__ == "__main__":
  main()
