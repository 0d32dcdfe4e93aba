import sys

from paper_snake.app import main

sys.exit(main())
