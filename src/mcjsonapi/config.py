""" Connection profiles for JSONAPI servers. A profile is a small JSON file
    in the configuration directory (see :func:`directory`) holding the
    address and credentials for one server, so that neither has to be
    repeated on every command line.
"""

import os
import threading

from . import json


_cache = dict()
_cache_lock = threading.Lock()

defaults = dict()
defaults['host'] = 'localhost'
defaults['port'] = 20059
defaults['username'] = ''
defaults['password'] = ''
defaults['salt'] = ''
defaults['timeout'] = None

# Environment variables, if set, take precedence over the profile contents.

environment = dict()
environment['host'] = 'MCJSONAPI_HOST'
environment['port'] = 'MCJSONAPI_PORT'
environment['username'] = 'MCJSONAPI_USERNAME'
environment['password'] = 'MCJSONAPI_PASSWORD'
environment['salt'] = 'MCJSONAPI_SALT'


class Configuration:
    """ A convenience class to represent one connection profile. An instance
        acts like a read-only dictionary with the keys enumerated in
        :data:`defaults`; any key missing from the profile on disk takes the
        default value.
    """

    def __init__(self, profile='default'):

        self.profile = str(profile)
        self.values = dict(defaults)

        # Only settings read from the profile or set via update() are
        # written back by save(); environment overrides stay out of it.

        self.stored = dict()
        self.load()


    def __contains__(self, key):
        return key in self.values


    def __getitem__(self, key):

        try:
            return self.values[key]
        except KeyError:
            raise KeyError('no such configuration setting: ' + str(key))


    def __repr__(self):
        shown = dict(self.values)
        if shown['password']:
            shown['password'] = '***'

        return 'Configuration(%r, %r)' % (self.profile, shown)


    def filename(self):
        """ Return the full path to the JSON file for this profile.
        """

        base_dir = directory()
        return os.path.join(base_dir, self.profile + '.json')


    def keys(self):
        return self.values.keys()


    def load(self):
        """ Load the profile from disk, if it exists, then apply any
            environment variable overrides.
        """

        filename = self.filename()

        try:
            raw_json = open(filename, 'rb').read()
        except FileNotFoundError:
            loaded = dict()
        else:
            loaded = json.loads(raw_json)

        if isinstance(loaded, dict):
            pass
        else:
            raise ValueError('profile must contain a JSON object: ' + filename)

        for key,value in loaded.items():
            if key in defaults:
                self.values[key] = value
                self.stored[key] = value

        for key,variable in environment.items():
            try:
                self.values[key] = os.environ[variable]
            except KeyError:
                pass

        self.values['port'] = int(self.values['port'])

        timeout = self.values['timeout']
        if timeout is not None:
            self.values['timeout'] = float(timeout)


    def save(self):
        """ Save the settings loaded from the profile file, plus any set via
            :func:`update`, back to the profile file in the configuration
            directory. Defaults and environment overrides are not saved.
        """

        base_directory = directory()

        if os.path.exists(base_directory):
            pass
        else:
            os.makedirs(base_directory, mode=0o700)

        target_filename = self.filename()
        raw_json = json.dumps(self.stored)

        writer = open(target_filename, 'wb')
        writer.write(raw_json)
        writer.close()

        # The profile holds a password.
        os.chmod(target_filename, 0o600)


    def update(self, **settings):
        """ Replace one or more settings in this profile. Unknown settings
            raise a KeyError. Call :func:`save` to persist the changes.
        """

        for key,value in settings.items():
            if key in defaults:
                self.values[key] = value
                self.stored[key] = value
            else:
                raise KeyError('no such configuration setting: ' + str(key))


# end of class Configuration



def directory():
    """ Return the directory holding the profile files: the value of the
        ``MCJSONAPI_HOME`` environment variable if it is set, otherwise
        ``$HOME/.mcjsonapi``.
    """

    try:
        return os.environ['MCJSONAPI_HOME']
    except KeyError:
        pass

    try:
        home = os.environ['HOME']
    except KeyError:
        raise RuntimeError('MCJSONAPI_HOME and HOME environment variables not set, cannot determine configuration directory')

    return os.path.join(home, '.mcjsonapi')



def get(profile='default'):
    """ Retrieve the locally cached :class:`Configuration` instance for the
        named *profile*, loading it on first use.
    """

    profile = str(profile)

    try:
        config = _cache[profile]
    except KeyError:
        _cache_lock.acquire()

        try:
            config = _cache[profile]
        except KeyError:
            config = Configuration(profile)
            _cache[profile] = config
        finally:
            _cache_lock.release()

    return config



def clear():
    """ Discard any cached :class:`Configuration` instances.
    """

    _cache_lock.acquire()
    _cache.clear()
    _cache_lock.release()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
