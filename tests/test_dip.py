"""Tests for the dependency inversion detector."""
from conftest import analyze, message_ids

from solidlint.rules.dip import DIPDetector, DIPOptions

IMPORTER = 'src/app/main.js'


class TestConcreteImports:
    def test_concrete_path_and_class(self):
        source = "import { PaymentGatewayImpl } from '../services/impl/PaymentGatewayImpl';\n"
        diagnostics = analyze(DIPDetector(), source, IMPORTER)
        assert message_ids(diagnostics) == ['directConcreteDependency', 'concreteClassImport']
        assert diagnostics[0].data == {'importPath': '../services/impl/PaymentGatewayImpl'}
        assert diagnostics[1].data == {'className': 'PaymentGatewayImpl'}

    def test_require_of_concrete_path(self):
        source = "const Mailer = require('./implementations/mailer');\n"
        assert message_ids(analyze(DIPDetector(), source, IMPORTER)) == ['directConcreteDependency']

    def test_abstract_path_is_fine(self):
        source = "import { IMailer } from './interfaces/IMailer';\n"
        assert analyze(DIPDetector(), source, IMPORTER) == []

    def test_concrete_class_name_from_neutral_path(self):
        source = "import { UserService } from './user';\nimport { IUserService } from './user';\n"
        diagnostics = analyze(DIPDetector(), source, IMPORTER)
        assert message_ids(diagnostics) == ['concreteClassImport']
        assert diagnostics[0].data == {'className': 'UserService'}

    def test_default_import_uses_local_name(self):
        source = "import OrderRepository from './orders';\n"
        assert message_ids(analyze(DIPDetector(), source, IMPORTER)) == ['concreteClassImport']

    def test_external_modules_skipped(self):
        source = "import { HttpService } from '@nestjs/axios';\n"
        assert analyze(DIPDetector(), source, IMPORTER) == []

    def test_allowed_files_skipped(self):
        source = "import { MailerImpl } from './impl/MailerImpl';\n"
        assert analyze(DIPDetector(), source, 'src/bootstrap.js') == []

    def test_path_alias_resolved(self):
        detector = DIPDetector(DIPOptions.from_dict({'pathAliases': {'@impl/*': 'src/impl/*'}}))
        source = "import mailer from '@impl/mailer';\n"
        assert message_ids(analyze(detector, source, IMPORTER)) == ['directConcreteDependency']


class TestSuggestions:
    def test_existing_interface_suggested(self, tmp_path):
        interfaces = tmp_path / 'src' / 'services' / 'interfaces'
        interfaces.mkdir(parents=True)
        (interfaces / 'PaymentGateway.ts').write_text('export interface PaymentGateway {}\n')
        importer = (tmp_path / 'src' / 'app' / 'main.js').as_posix()

        source = "const gateway = require('../services/impl/PaymentGatewayImpl');\n"
        diagnostics = analyze(DIPDetector(), source, importer)
        assert message_ids(diagnostics) == ['directConcreteDependency', 'suggestAbstraction']
        assert diagnostics[1].data['suggestedPath'] == '../services/interfaces/PaymentGateway'

    def test_importer_directory_need_not_exist(self, tmp_path):
        interfaces = tmp_path / 'lib' / 'interfaces'
        interfaces.mkdir(parents=True)
        (interfaces / 'Store.js').write_text('module.exports = {};\n')
        importer = (tmp_path / 'lib' / 'missing' / 'deeper' / 'main.js').as_posix()

        source = "const store = require('../../impl/StoreImpl');\n"
        diagnostics = analyze(DIPDetector(), source, importer)
        assert message_ids(diagnostics) == ['directConcreteDependency', 'suggestAbstraction']
        assert diagnostics[1].data['suggestedPath'] == '../../interfaces/Store'

    def test_lookups_are_not_shared_between_detectors(self, tmp_path):
        importer = (tmp_path / 'src' / 'main.js').as_posix()
        source = "const cache = require('./impl/CacheImpl');\n"
        before = analyze(DIPDetector(), source, importer)
        assert message_ids(before) == ['directConcreteDependency']

        interfaces = tmp_path / 'src' / 'interfaces'
        interfaces.mkdir(parents=True)
        (interfaces / 'Cache.ts').write_text('export interface Cache {}\n')
        after = analyze(DIPDetector(), source, importer)
        assert message_ids(after) == ['directConcreteDependency', 'suggestAbstraction']

    def test_custom_mapping_wins(self):
        options = DIPOptions(custom_mappings={'./impl/Cache': './contracts/Cache'})
        source = "const cache = require('./impl/Cache');\n"
        diagnostics = analyze(DIPDetector(options), source, IMPORTER)
        assert diagnostics[1].data == {'importPath': './impl/Cache',
                                       'suggestedPath': './contracts/Cache'}

    def test_strict_mode_reports_missing_abstraction(self):
        source = "const cache = require('./impl/Cache');\n"
        diagnostics = analyze(DIPDetector(DIPOptions(strict_mode=True)), source, IMPORTER)
        assert message_ids(diagnostics) == ['directConcreteDependency', 'noAbstractionFound']


class TestTypeScriptTypes:
    def test_type_only_import_of_concrete_path(self):
        source = "import type { OrderImpl } from './impl/OrderImpl';\n"
        diagnostics = analyze(DIPDetector(), source, 'src/app/main.ts')
        assert message_ids(diagnostics) == ['typeScriptTypeImport']

    def test_type_checks_can_be_disabled(self):
        detector = DIPDetector(DIPOptions.from_dict({'checkTypeScriptTypes': False}))
        source = "import type { OrderImpl } from './impl/OrderImpl';\n"
        diagnostics = analyze(detector, source, 'src/app/main.ts')
        assert message_ids(diagnostics) == ['directConcreteDependency']
