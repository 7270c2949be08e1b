# targets.py
# The two targets this tool provisions: an Express/Sequelize/Bull backend that
# converts videos with ffmpeg, and a React frontend for it.
from __future__ import annotations

import os
import sys
from typing import List

from .dsl import cmd, env_file, install, locate, mkdir, patch, target
from .model import Target

BACKEND_PACKAGES = (
    "@babel/cli", "@babel/core", "@babel/node", "@babel/preset-env",
    "bull", "cors", "dotenv", "fluent-ffmpeg", "ffprobe-static",
    "multer", "sequelize", "sqlite3",
)

FRONTEND_PACKAGES = (
    "axios", "bootstrap", "formik", "mobx", "mobx-react",
    "react-bootstrap", "react-router-dom",
)

VIDEO_CONVERSION_ATTRIBUTES = "filePath:string,convertedFilePath:string,outputFormat:string,status:enum"

START_SCRIPT = '    "start": "node ./bin/www"'
START_SCRIPT_BABEL = (
    '    "start": "nodemon --exec npm run babel-node --  ./bin/www",\n'
    '    "babel-node": "babel-node"'
)


def ffmpeg_search_root(platform: str = sys.platform) -> str:
    if platform == "win32":
        return os.environ.get("USERPROFILE", "~")
    return "/"


def backend(platform: str = sys.platform) -> Target:
    return target(
        "backend",
        cmd("npx", "express-generator"),
        cmd("npm", "install"),
        cmd("npm", "i", *BACKEND_PACKAGES),
        install(".", ".babelrc"),
        patch("package.json", START_SCRIPT, START_SCRIPT_BABEL),
        cmd("npm", "install", "--save-dev", "sequelize-cli"),
        cmd("npx", "sequelize", "init"),
        install("config", "config.json"),
        cmd("npx", "sequelize-cli", "--name", "VideoConversion", "--attributes", VIDEO_CONVERSION_ATTRIBUTES, "model:generate"),
        install("migrations", template="create-video-conversion.js", match="*-create-video-conversion.js"),
        install("models", "videoconversion.js"),
        cmd("npx", "sequelize-cli", "db:migrate"),
        mkdir("files"),
        mkdir("queues"),
        install("queues", "videoQueue.js"),
        # the Bull queue needs a redis broker; only provisioned automatically on linux
        cmd("sudo", "apt-get", "update", platforms=["linux"]),
        cmd("sudo", "apt-get", "-y", "upgrade", platforms=["linux"]),
        cmd("sudo", "apt-get", "-y", "install", "redis-server", platforms=["linux"]),
        cmd("redis-server", "--daemonize", "yes", platforms=["linux"]),
        install("routes", "conversions.js"),
        install(".", "app.js"),
        env_file(
            ".env",
            locate("FFMPEG_PATH", "ffmpeg", ffmpeg_search_root(platform)),
            # ffprobe-static installs its binaries here
            locate("FFPROBE_PATH", "ffprobe", "node_modules", use_path=False),
        ),
    )


def frontend(platform: str = sys.platform) -> Target:
    return target(
        "frontend",
        cmd("npm", "i", *FRONTEND_PACKAGES),
        install("src", "App.js"),
        install("src", "App.css"),
        install("src", "HomePage.js"),
        install("src", "request.js"),
        install("src", "store.js"),
        install("src", "TopBar.js"),
        install("public", "index.html"),
        cmd("npm", "i", "-g", "nodemon"),
        bootstrap=[cmd("npx", "create-react-app", "frontend")],
    )


def default_targets(platform: str = sys.platform) -> List[Target]:
    return [backend(platform), frontend(platform)]
