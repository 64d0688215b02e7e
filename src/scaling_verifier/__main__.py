import sys

from scaling_verifier.runner import main

sys.exit(main())
