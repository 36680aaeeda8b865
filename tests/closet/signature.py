exports = {"sigOne": "valueOne", "sigTwo": "valueTwo"}
