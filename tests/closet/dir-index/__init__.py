exports = {"dirIndex": "value"}
