"""
Find info in the IANA Language Subtag Registry.

Each filter flag names a registry field and takes a value; a value is
matched as a case-insensitive substring, or exactly if it starts with '='.
All filters must match for a record to be printed.

    iana-info -l fr
    iana-info -d german -t =variant
    iana-info --fetch
"""
import sys
import os
import os.path
import argparse

import requests

import fetchreg
from subtagreg import RenderConfig, RegistryFormatError, scan

DEFAULT_IANA_FILE_NAME = "language-subtag-registry"
DATA_DIR = "udata"
IANA_ENV = "IANA_FILE"

# (option strings, field, help)
_FIELD_FLAGS = [
    (('-add', '--added'), 'Added', 'yyyy-mm-dd'),
    (('-dep', '--deprecated'), 'Deprecated', 'yyyy-mm-dd'),
    (('-cmt', '--comments'), 'Comments', None),
    (('-d', '-desc', '--description'), 'Description', None),
    (('-mac', '--macrolanguage'), 'Macrolanguage', None),
    (('-pref', '--preferred-value'), 'Preferred-Value', None),
    (('-px', '--prefix'), 'Prefix', None),
    (('-scp', '--scope'), 'Scope',
     'one of: collection, macrolanguage, private-use, special'),
    (('-stg', '--subtag'), 'Subtag', None),
    (('-ss', '--suppress-script'), 'Suppress-Script', None),
    (('-tg', '--tag'), 'Tag', None),
    (('-t', '--type'), 'Type',
     'one of: extlang, grandfathered, language, redundant, region, '
     'script, variant'),
]

# (option strings, record type, field that gets the value)
_SHORTHAND_FLAGS = [
    (('-el', '--extlang'), 'extlang', 'Subtag'),
    (('-gf', '--grandfathered'), 'grandfathered', 'Tag'),
    (('-l', '--language'), 'language', 'Subtag'),
    (('-red', '--redundant'), 'redundant', 'Tag'),
    (('-r', '--region'), 'region', 'Subtag'),
    (('-s', '--script'), 'script', 'Subtag'),
    (('-v', '--variant'), 'variant', 'Subtag'),
]


class _FilterAction(argparse.Action):
    """Store a flag's value under its registry field in namespace.filters"""
    def __init__(self, option_strings, dest, field=None, rectype=None,
                 **kwargs):
        self.field = field
        self.rectype = rectype
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        filters = getattr(namespace, self.dest, None)
        if filters is None:
            filters = {}
            setattr(namespace, self.dest, filters)
        if self.rectype is not None:
            filters['Type'] = '={}'.format(self.rectype)
        filters[self.field] = values


_VALUE_FLAGS = set(
    flag for flags, _, _ in _FIELD_FLAGS + _SHORTHAND_FLAGS for flag in flags)


class _HelpOnErrorParser(argparse.ArgumentParser):
    def parse_args(self, args=None, namespace=None):
        if args is None:
            args = sys.argv[1:]
        return super().parse_args(self._bind_values(list(args)), namespace)

    def _bind_values(self, args):
        """
        Attach the next token to each filter flag as flag=value, even if
        it starts with '-', unless that token is itself a known flag.

        Only the listed option strings are flags: '-tlang' is an error,
        not '-t lang'.
        """
        known = self._option_string_actions
        bound = []
        i = 0
        while i < len(args):
            arg = args[i]
            if arg in _VALUE_FLAGS:
                if i + 1 < len(args) and args[i+1] not in known:
                    bound.append('{}={}'.format(arg, args[i+1]))
                    i += 2
                    continue
            elif arg.startswith('-') and arg not in known:
                head = arg.split('=', 1)[0]
                # only --color=always and friends may carry an attached value
                if not head.startswith('--') or head not in known or \
                        head in _VALUE_FLAGS:
                    self.error("unrecognized arguments: {}".format(arg))
            bound.append(arg)
            i += 1
        return bound

    def error(self, message):
        print("{}: error: {}".format(self.prog, message), file=sys.stderr)
        self.print_help()
        sys.exit(1)


def build_parser():
    parser = _HelpOnErrorParser(
        prog='iana-info',
        description='Find info in the IANA Language Subtag Registry.',
        epilog="A value can be a substring, or an exact match if it "
               "starts with '='.",
        allow_abbrev=False)

    filtering = parser.add_argument_group('filtering')
    for flags, field, xhelp in _FIELD_FLAGS:
        filtering.add_argument(
            *flags, dest='filters', action=_FilterAction, field=field,
            metavar='<value>', help=xhelp)

    shorthands = parser.add_argument_group(
        'shorthands', 'Type=<kind> plus Subtag (or Tag) = <value>')
    for flags, rectype, field in _SHORTHAND_FLAGS:
        shorthands.add_argument(
            *flags, dest='filters', action=_FilterAction, field=field,
            rectype=rectype, metavar='<value>')

    other = parser.add_argument_group('other')
    other.add_argument(
        '--color', dest='color', choices=['always', 'never', 'auto'],
        default='auto',
        help='Use colors always, never, or only on a terminal (default).')
    other.add_argument(
        '--no-highlight', dest='highlight', action='store_false',
        default=True, help="Don't color the matched text in field values.")
    other.add_argument(
        '--json', dest='json', action='store_true', default=False,
        help='Print each matching record as one JSON object per line.')
    other.add_argument(
        '-f', '--file', dest='file', type=str, default=None,
        help='Registry file to read (default: search {}, the program '
             'directory and the current directory).'.format(IANA_ENV))
    other.add_argument(
        '--fetch', dest='fetch', action='store_true', default=False,
        help='Download the current registry from IANA first.')
    parser.set_defaults(filters=None)
    return parser


def _program_dir():
    return os.path.dirname(os.path.abspath(__file__))


def default_data_path(progdir=None):
    progdir = progdir or _program_dir()
    return os.path.join(progdir, DATA_DIR, DEFAULT_IANA_FILE_NAME)


def candidate_paths(environ=None, progdir=None):
    environ = os.environ if environ is None else environ
    progdir = progdir or _program_dir()
    paths = []
    if environ.get(IANA_ENV):
        paths.append(environ[IANA_ENV])
    paths.append(default_data_path(progdir))
    paths.append(os.path.join(progdir, DEFAULT_IANA_FILE_NAME))
    paths.append(os.path.join(os.getcwd(), DEFAULT_IANA_FILE_NAME))
    return paths


def find_data_path(environ=None, progdir=None):
    """
    Return the first registry file that exists, or the default
    location under the program directory if none do.
    """
    for path in candidate_paths(environ, progdir):
        if os.path.isfile(path):
            return path
    return default_data_path(progdir)


def _use_color(choice, stream=None):
    if choice == 'always':
        return True
    elif choice == 'never':
        return False
    return (stream or sys.stdout).isatty()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    filters = args.filters or {}

    if args.fetch:
        outname = args.file or default_data_path()
        try:
            fetchreg.main(outname)
        except (requests.RequestException, OSError) as e:
            print("Fetch failed: {}".format(e), file=sys.stderr)
            return 1
        if not filters:
            return 0

    if not filters:
        parser.print_help()
        return 1

    cfg = RenderConfig(color=_use_color(args.color),
                       highlight=args.highlight, json=args.json)
    data_path = args.file or find_data_path()
    try:
        infile = open(data_path, encoding='utf8')
    except OSError as e:
        print("Can't open registry {}: {}".format(data_path, e),
              file=sys.stderr)
        return 1

    with infile:
        try:
            scan(infile, filters, cfg, sys.stdout)
        except RegistryFormatError as e:
            print("Malformed registry: {}".format(e), file=sys.stderr)
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
