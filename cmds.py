import os

import uvicorn

from bucketapi.backends.registry import build_backend
from bucketapi.config import load_config
from main import app, logger, settings


def serve(config_path=None):
    """Run the gateway on the Port from the configuration file."""
    if config_path:
        # requests read the path from the environment
        os.environ["BUCKETAPI_CONFIG_PATH"] = config_path
    config = load_config(config_path or settings.config_path)
    uvicorn.run(app, host=settings.host, port=int(config.port))


def list_prefix(backend, prefix="", config_path=None):
    config = load_config(config_path or settings.config_path)
    storage = build_backend(backend, config, logger)
    for obj in storage.list_objects(prefix):
        kind = "d" if obj.is_dir else "-"
        print(f"{kind} {str(obj.size or ''):>12} {str(obj.create_time or ''):<32} {obj.filename}")


def show_domain(backend, config_path=None):
    config = load_config(config_path or settings.config_path)
    print(build_backend(backend, config, logger).domain)


if __name__ == "__main__":
    serve()
