exports = {"b": "x"}
