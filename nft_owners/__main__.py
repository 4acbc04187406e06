import sys

from nft_owners.job import main

sys.exit(main())
