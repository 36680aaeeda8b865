from haute import Literal


def handler(request):
    return "handled"


exports = Literal(handler)
