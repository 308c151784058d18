from rendergit_site.cli import main

raise SystemExit(main())
