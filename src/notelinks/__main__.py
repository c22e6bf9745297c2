from notelinks.cli import main

raise SystemExit(main())
