"""Allow running as: python -m tile_quote"""

from tile_quote.main import run, serve
import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        serve()
    elif len(sys.argv) > 1:
        run(sys.argv[1])
    else:
        print("Usage: python -m tile_quote <quotation.json> | --serve")
