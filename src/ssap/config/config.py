import os
import platform

from configobj import ConfigObj, ConfigObjError, Section, flatten_errors
from validate import Validator

# The default extension for configuration files
config_extension = '.cfg'


def config_flavor(name, flavor=None):
    configname = name if not flavor else name + '.' + flavor
    return configname


def config_filename(name, directory=None):
    """
    Determines the location of a config file in the given directory.
    """
    config_file = os.path.join(directory or '', name + config_extension)
    return config_file


def load_config_file_base(file, must_exist=True, **kwargs):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    try:
        return ConfigObj(file, interpolation='Template', file_error=must_exist, **kwargs) \
            if must_exist or os.path.exists(file) else ConfigObj(**kwargs)
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, subpart=None, **kwargs) -> ConfigObj:
    """
    Loads a specialization of a config file. The configuration file is expected to be named
    after the base, followed by a period and then the specialization, if the specialization is given,
    otherwise just the base name. A missing file loads as an empty configuration.
    """
    configname = config_flavor(name, subpart)
    file = config_filename(configname, directory)
    return load_config_file_base(file, False, **kwargs)


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    if name == 'darwin':
        name = 'osx'
    return name


def os_name():
    return map_os_name(platform.system())


def user_config_file(name):
    return os.path.expanduser('~/.' + name + config_extension)


def describe_errors(config, result):
    """
    >>> describe_errors(None, True)
    ''
    """
    if result is True:
        return ''
    messages = []
    for sections, key, error in flatten_errors(config, result):
        path = '/'.join(sections + ([key] if key is not None else []))
        messages.append('%s: %s' % (path, error if error is not False else 'missing'))
    return '; '.join(messages)


def load_config(name, directory, user_file=None):
    """
        Loads all the configuration files that relate to the given name.
        Configurations are merged in this order, later values winning:
        - the default specialization
        - the platform specialization
        - the user override (~/.name.cfg)
        - the base configuration
        The merged configuration is validated, and values converted to their types, against the
        "schema" specialization.
    :param directory: the location of the configuration files
    :param user_file: the user override file, by default ~/.name.cfg
    :return: the validated ConfigObj
    """
    local_config = config_flavor_file(name, directory)
    default_config = config_flavor_file(name, directory, 'default')
    platform_config = config_flavor_file(name, directory, os_name())
    user_config = load_config_file_base(user_file or user_config_file(name), must_exist=False)
    config = ConfigObj()
    config.merge(default_config)
    config.merge(platform_config)
    config.merge(user_config)
    config.merge(local_config)

    config.configspec = config_flavor_file(name, directory, 'schema', _inspec=True)
    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        raise ConfigObjError("the config file %s failed validation %s" % (name, describe_errors(config, result)))
    return config


def apply(target, config_path, config_name, directory, user_file=None):
    """
    Applies defined values from a path to a given target object.
    :param target: The object to receive the values defined
    :param config_path: The path that is the prefix to the values defined. The path is split on '.'.
    :param config_name: The configuration file to load.
    :param directory: the directory containing the config file
    :return: the loaded configuration
    """
    conf = load_config(config_name, directory, user_file)
    name_parts = config_path.split('.')
    apply_conf_path(conf, name_parts, target)
    return conf


def fetch_conf_path(conf: Section, path):
    """
    Retrieves the named configuration section
    :param conf:        The root configuration
    :param path:        An iterable that lists the names of the config to resolve
    :return: The configuration object identified by the path
    """
    for p in path:    # lookup specific section
        conf = conf.get(p, None)
        if conf is None:
            return
    return conf


def apply_conf_path(conf: Section, name_parts, target):
    """
    Applies a configuration path to a given target object
    :param conf:        The root configuration object
    :param name_parts:  The path of the configuration to apply
    :param target:      The target object that receives the configured values
    """
    conf = fetch_conf_path(conf, name_parts)
    if conf:
        apply_conf(conf, target)


def apply_conf(conf: Section, target):
    """
    Applies the attributes contained in a configuration object to a target object.
    It does this by iterating over the items in the configuration and setting any attributes with the same name.
    """
    for k, v in conf.items():
        if hasattr(target, k):
            setattr(target, k, v)


def fq_module_name(module):
    """
    Retrieves the fully qualified name of the module.
    """
    if not module.__package__:
        raise ConfigObjError('module has no package defined')
    return module.__name__ if module.__name__ != '__main__' else \
        module.__package__ + '.' + os.path.splitext(os.path.basename(module.__file__))[0]


def configure_module(module, config_name=None, directory=None, user_file=None):
    """
    Applies the configuration to the given module.
    The values are taken from the section named after the module's location, e.g. [ssap] [[settings]]
    for ssap.settings. By default the configuration files are named after the module and live beside it.
    """
    fqname = fq_module_name(module)
    if not config_name:
        config_name = fqname.split('.')[-1]
    return apply(module, fqname, config_name, directory or os.path.dirname(module.__file__), user_file)
