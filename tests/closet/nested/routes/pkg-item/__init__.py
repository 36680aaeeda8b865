exports = {"path": "/pkg"}
