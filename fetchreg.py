"""Download the current IANA language-subtag-registry."""
import sys
import os

import requests

REGISTRY_URL = \
    'https://www.iana.org/assignments/language-subtag-registry/language-subtag-registry'


def fetch_registry(url=REGISTRY_URL, timeout=60):
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    # served as text/plain without a charset; the registry is utf-8
    return r.content.decode('utf8')


def save_registry(text, outname):
    """Write the registry text to outname and return its File-Date line."""
    dirname = os.path.dirname(outname)
    if dirname and not os.path.exists(dirname):
        os.makedirs(dirname)
    with open(outname, 'w', encoding='utf8') as outfile:
        outfile.write(text)
    for line in text.split('\n'):
        if line.startswith('File-Date:'):
            return line.strip()
    return None


def main(outname, url=REGISTRY_URL):
    text = fetch_registry(url)
    filedate = save_registry(text, outname)
    print("Wrote registry ({}) to {}".format(
        filedate or 'no File-Date', outname))


if __name__ == '__main__':
    if len(sys.argv) != 2:
        print("usage: {} outfile".format(sys.argv[0]))
        sys.exit()
    main(sys.argv[1])
