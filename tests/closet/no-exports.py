unrelated = {"not": "exported"}
