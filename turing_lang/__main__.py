from turing_lang.compiler.cli import main

raise SystemExit(main())
