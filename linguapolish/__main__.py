from linguapolish.cli import main

raise SystemExit(main())
